"""
Content loader: turns a folder of headline screenshots into a Content record.
"""

import logging
from datetime import date
from pathlib import Path

from stitchup.config import Settings
from stitchup.models.schemas import Article, Content
from stitchup.utils.media_utils import list_image_files

logger = logging.getLogger(__name__)


def headline_from_filename(filename: str) -> str:
    """
    Readable headline from an image filename.

    Example:
        >>> headline_from_filename("storm_hits-coast.png")
        'storm hits coast'
    """
    stem = Path(filename).stem
    return " ".join(stem.replace("_", " ").replace("-", " ").split())


def format_run_date(day: date) -> str:
    """'October 19, 2026' style date used in titles."""
    return f"{day:%B} {day.day}, {day.year}"


class ContentLoader:
    """
    Builds the run's Content from headline images on disk.

    Example:
        content = ContentLoader(settings).load()
        print(len(content.image_paths))
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def load(self, input_dir: Path | None = None, today: date | None = None) -> Content:
        """
        Collect headline images from ``input_dir``.

        Args:
            input_dir: Directory with headline images (default: settings.input_dir)
            today: Run date (default: today)

        Returns:
            Content; ``image_paths`` is empty if no images were found
        """
        input_dir = Path(input_dir or self.settings.input_dir)
        run_date = format_run_date(today or date.today())

        image_paths = list_image_files(input_dir)
        articles = [
            Article(title=headline_from_filename(path.name), source=path.name)
            for path in image_paths
        ]

        logger.info(f"Found {len(image_paths)} headline images in {input_dir}")

        return Content(
            title=f"News Headlines: {run_date}",
            date=run_date,
            description=f"{len(image_paths)} headline images from {input_dir}",
            image_paths=image_paths,
            articles=articles,
        )
