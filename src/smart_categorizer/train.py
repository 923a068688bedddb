import argparse
import sys

from smart_categorizer.core import settings
from smart_categorizer.errors import ModelSaveError, TrainingError
from smart_categorizer.logger import get_logger, setup_logging
from smart_categorizer.services.training import train_and_save

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smart-categorizer-train",
        description="Train the transaction categorization model from the built-in synthetic corpus",
    )
    parser.add_argument(
        "--output",
        help="Model file to write (defaults to MODEL_PATH or <DATA_DIR>/categorization_model.bin)",
    )
    parser.add_argument("--quiet", action="store_true", help="Only print errors")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()
    output = args.output or settings.get_settings().model_path

    try:
        report = train_and_save(output)
    except (TrainingError, ModelSaveError, OSError) as e:
        logger.error("[TRAIN] Failed: %s", e)
        print(f"error: {e}", file=sys.stderr)
        return 1

    if not args.quiet:
        print(f"Samples:          {report.sample_count}")
        for category, count in report.samples_per_category:
            print(f"  - {category}: {count}")
        print(f"Vocabulary size:  {report.vocabulary_size} terms")
        print(f"Classes:          {report.num_classes}")
        print(f"Model file:       {report.model_path} ({report.file_size_kb:.1f} KB)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
