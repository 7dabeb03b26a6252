"""Interactive git branch picker.

Features:
- List local branches, most recently committed first
- Show the pull request opened from each branch, colored by state
- Pick a branch with fzf and check it out
- Preview the pull request description or diff while picking
- Static mode for printing the table without interaction
"""

__version__ = "0.1.0"
