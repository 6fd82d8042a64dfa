"""console script entrypoint for the sapm CLI."""


def run() -> None:
    from .main import app

    app(prog_name="sapm")


def main() -> None:
    """Console entrypoint used by the ``sapm`` script."""
    run()


if __name__ == "__main__":
    run()
