"""Allow ``python -m ctags_ls``."""
from .server import main

if __name__ == "__main__":
    main()
