"""Allow ``python -m start_vibe_project``."""

from start_vibe_project.cli import main

if __name__ == "__main__":
    main()
