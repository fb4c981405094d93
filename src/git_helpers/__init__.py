"""Short mnemonic commands on top of git.

Features:
- Checkout branches by exact name or by a fuzzy phrase
- Search local and remote branches, choosing interactively between matches
- Merge one branch into another without leaving the current branch
- Rename and delete branches locally and remotely
- Commit, push and open pull requests in one go
- Anything else is passed through to git
"""

__version__ = "0.1.0"
