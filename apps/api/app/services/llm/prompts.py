CODE_SUMMARY_PROMPT = """
You are a senior software engineer onboarding a junior engineer onto a project.

Explain the purpose of the file below in no more than 100 words.
Mention the main functions, classes or configuration it defines. Do NOT guess
about code that is not shown.

File: {path}

```
{content}
```
"""

COMMIT_SUMMARY_PROMPT = """
You are an expert programmer summarizing a git diff.

Lines starting with `+` were added, lines starting with `-` were deleted,
other lines are context. Write a short bullet list of what changed and in
which files. Skip anything that is only formatting. Do NOT include the diff.

```diff
{diff}
```
"""


def truncate(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars]


def code_summary_prompt(path: str, content: str, max_chars: int) -> str:
    return CODE_SUMMARY_PROMPT.format(path=path, content=truncate(content, max_chars))


def commit_summary_prompt(diff: str, max_chars: int) -> str:
    return COMMIT_SUMMARY_PROMPT.format(diff=truncate(diff, max_chars))
