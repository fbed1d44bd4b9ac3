"""Entry point for `python -m gae_deploy`."""

from .tool.gae_deploy import main

if __name__ == "__main__":
    main()
