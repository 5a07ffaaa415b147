"""Application entry point for the Rift Reviewer backend."""

from rift_reviewer.main import run

if __name__ == "__main__":
    run()
