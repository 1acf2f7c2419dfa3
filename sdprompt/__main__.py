# sdprompt/__main__.py
from .cli import app

if __name__ == "__main__":
    app()
