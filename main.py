"""Entry point delegating to the glue pipeline CLI."""

from courier_sched.glue.pipeline import main as pipeline_main


def main() -> None:
    pipeline_main()


if __name__ == "__main__":
    main()
