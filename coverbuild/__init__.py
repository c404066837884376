"""
coverbuild - Paperback cover assembly

Drives a LaTeX engine over the front cover, back cover and spine sources of a
paperback, composites them into a single cover PDF and copies the result to the
book's root directory.

Architecture:
- Rendering Context: parameter reading, step execution and the build pipeline
- Utils: text processing, logging setup, PDF inspection
"""

__version__ = "0.1.0"
