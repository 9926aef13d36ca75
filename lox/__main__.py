"""
So that "python -m lox program.lox" works the same as the console script.
"""
from .cmdline import main

main()
