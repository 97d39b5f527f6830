from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from PyQt6 import QtWidgets

from diagnostics.logging_setup import configure_logging
from gallery_store import DirectoryImageLoader, JsonGalleryStore

from . import config as viewer_config
from .controller import ViewerController
from .main_window import ViewerWindow

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="artmap",
        description="Pan/zoom scatter plot of painting thumbnails.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="gallery directory with points.json, artists.json, thumbnails/ and resized/",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=viewer_config.CONFIG_PATH,
        help="viewer config file (created with defaults when missing)",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="directory for logs/ and crashes/ (default: data/roaming)",
    )
    parser.add_argument(
        "--max-bitmap-size",
        type=int,
        default=None,
        help="override the largest raster dimension used for tier bitmaps",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    log_info = configure_logging(args.log_dir)
    config = viewer_config.load_viewer_config(args.config)
    if args.max_bitmap_size is not None:
        config = viewer_config.config_from_dict(
            {**viewer_config.config_to_dict(config), "max_bitmap_size": args.max_bitmap_size}
        )
    data_dir = args.data_dir or Path(config.data_dir)
    if args.data_dir is not None:
        config = replace(config, data_dir=str(args.data_dir))
    logger.info("starting viewer data_dir=%s log=%s", data_dir, log_info["log_path"])

    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication(sys.argv[:1])
    window = ViewerWindow()
    window.resize(1280, 800)
    controller = ViewerController(
        JsonGalleryStore(data_dir),
        DirectoryImageLoader(data_dir),
        config=config,
        host=window,
        detail=window.detail_panel,
        viewport_size=(window.canvas.width(), window.canvas.height()),
        crash_dir=args.log_dir,
    )
    window.bind(controller)
    window.show()
    controller.start()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
