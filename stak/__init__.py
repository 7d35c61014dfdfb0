"""
stak: an intelligent terminal scratchpad.

Type a line, and stak works out what it is and files it away:

- Automatic classification into notes, todos, links, code, questions and meetings
- Keyword tagging (languages, topics, domains)
- One Markdown file per day with YAML frontmatter as the source of truth
- Stream, todo and calendar views in a curses interface
- Link titles fetched in the background

Run `stak --help` for command line options.
"""

__version__ = "1.0.0"
__author__ = "stak contributors"
__license__ = "MIT"

from .cli import main  # noqa: E402

__all__ = ['main']
