"""shellscope - Shell alias and function explorer

Philosophy:
- Ruthless simplicity
- Brick architecture (self-contained modules)
- Degrade per statement, never per file
- Warnings travel with results instead of interrupting them

shellscope reads the live interactive shell session and the well-known shell
startup files in the home directory, and reports every alias and documented
function it can find.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
