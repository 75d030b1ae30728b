"""Entry point for running the rotaplan web backend."""

from rotaplan_web import create_app

app = create_app()

if __name__ == "__main__":
    app.run()
