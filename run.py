"""Entry point for running the rotation scheduling service."""

from app import create_app

app = create_app()

if __name__ == "__main__":
    app.run()
