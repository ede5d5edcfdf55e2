"""Minimal Markdown to HTML conversion for PDF printing.

Only the constructs the assembler emits are recognised: #-#### headers, **bold**,
fenced code, blank-line breaks, --- rules and "- " items. Items are emitted as bare
<li> elements without a surrounding list; print styling relies on that.
"""

import re

_SUBSTITUTIONS = (
    (re.compile(r"^# (.+)$", re.MULTILINE), r"<h1>\1</h1>"),
    (re.compile(r"^## (.+)$", re.MULTILINE), r"<h2>\1</h2>"),
    (re.compile(r"^### (.+)$", re.MULTILINE), r"<h3>\1</h3>"),
    (re.compile(r"^#### (.+)$", re.MULTILINE), r"<h4>\1</h4>"),
    (re.compile(r"\*\*(.+?)\*\*"), r"<strong>\1</strong>"),
    (re.compile(r"```([\s\S]*?)```"), r"<code>\1</code>"),
    (re.compile(r"\n\n"), "<br><br>"),
    (re.compile(r"---"), "<hr>"),
    (re.compile(r"^- (.+)$", re.MULTILINE), r"<li>\1</li>"),
)

HTML_HEAD = """<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <title>Email Evidence Document</title>
  <style>
    body {
      font-family: Arial, sans-serif;
      line-height: 1.6;
      margin: 0;
      padding: 20px;
      color: #333;
    }
    h1 {
      text-align: center;
      color: #000;
      border-bottom: 1px solid #ccc;
      padding-bottom: 10px;
    }
    h2 {
      color: #333;
      margin-top: 20px;
      border-bottom: 1px solid #eee;
      padding-bottom: 5px;
    }
    h3 {
      color: #444;
      margin-top: 15px;
    }
    h4 {
      color: #555;
      margin-top: 10px;
    }
    code {
      background-color: #f5f5f5;
      padding: 10px;
      display: block;
      border: 1px solid #ddd;
      white-space: pre-wrap;
      word-wrap: break-word;
    }
    strong {
      font-weight: bold;
    }
    hr {
      border: 0;
      border-top: 1px solid #eee;
      margin: 20px 0;
    }
    .page-break {
      page-break-after: always;
    }
  </style>
</head>
<body>
"""

HTML_TAIL = """
</body>
</html>"""


def markdown_to_html(markdown: str) -> str:
    """Apply the substitution pipeline in order; no document shell."""
    html = markdown
    for pattern, replacement in _SUBSTITUTIONS:
        html = pattern.sub(replacement, html)
    return html


def render_to_html(markdown: str) -> str:
    return HTML_HEAD + markdown_to_html(markdown) + HTML_TAIL
