from warpbox.apps.cli.app import app

if __name__ == "__main__":  # pragma: no cover
    app(prog_name="warpbox")
