"""Launch the ear trainer from a source checkout: ``python run.py [options]``."""

from ear_trainer.app import main

if __name__ == "__main__":
    raise SystemExit(main())
