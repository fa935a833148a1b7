#!/usr/bin/env python3
"""
Download every xkcd comic image that is not already on disk.

Comic image URLs are cached in a local SQLite database so that each comic's
metadata is fetched from the API only once. Images already present in the
image directory are skipped, so re-running is cheap.

Usage:
    python sync.py                          # Use config.ini / default paths
    python sync.py -db ~/xkcd.db            # Use a different database file
    python sync.py -imgdir ~/comics/xkcd    # Save images somewhere else
"""

import argparse
import configparser
import os
import posixpath
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from urllib.parse import urlparse

from app_logging import app_logger, set_debug_logging
from config import load_config, resolve_config, debug_logging_enabled, ConfigError, DownloaderConfig
from database import ComicStore, StoreError
from downloader import download, file_exists, DownloadError
from models.xkcd import XkcdClient, XkcdApiError, is_connection_error


@dataclass
class SyncResult:
    """Counters for one pass of the sync loop."""
    checked: int = 0
    fetched: int = 0
    inserted: int = 0
    downloaded: int = 0
    skipped_existing: int = 0
    failed_downloads: int = 0


def image_filename(image_url: str) -> Optional[str]:
    """Base filename of an image URL, or None if the URL has no file part."""
    name = posixpath.basename(urlparse(image_url).path)
    return name or None


def resolve_image_url(store: ComicStore, client: XkcdClient, comic_id: int, result: SyncResult) -> str:
    """
    Return the image URL for comic_id from the cache, fetching and caching it on a miss.

    A failed insert is logged and otherwise ignored; the comic will simply be
    fetched again on the next run.
    """
    image_url, found = store.lookup_image_url(comic_id)
    if found:
        return image_url

    comic = client.get(comic_id)
    result.fetched += 1
    image_url = comic.image_url

    try:
        store.insert_comic(comic_id, image_url)
        result.inserted += 1
    except StoreError as e:
        app_logger.warning(f"Unable to cache comic {comic_id}: {e}")

    return image_url


def sync_comics(store: ComicStore, client: XkcdClient, cfg: DownloaderConfig, download_fn=None) -> SyncResult:
    """
    Walk comic ids 1..latest and download any image not already on disk.

    Args:
        store: Comic cache
        client: xkcd API client
        cfg: Resolved paths and settings
        download_fn: Callable(url, local_path); defaults to downloader.download
            using the client's session

    Returns:
        SyncResult with per-run counters

    Raises:
        XkcdApiError: if any metadata request fails
        StoreError: if a cache lookup fails
    """
    if download_fn is None:
        def download_fn(url, local_path):
            download(url, local_path, session=client.session, timeout=cfg.request_timeout)

    latest = client.latest()
    app_logger.info(f"Latest comic is #{latest.number}: {latest.safe_title or latest.title}")

    result = SyncResult()
    for comic_id in range(1, latest.number + 1):
        if comic_id in cfg.skip_ids:
            # e.g. there is no comic #404
            continue
        result.checked += 1

        image_url = resolve_image_url(store, client, comic_id, result)

        filename = image_filename(image_url or "")
        if not filename:
            app_logger.warning(f"Comic {comic_id} has no image file in URL {image_url!r}, skipping")
            continue

        local_path = os.path.join(cfg.image_dir, filename)
        if file_exists(local_path):
            result.skipped_existing += 1
            continue

        app_logger.info(f"Downloading {comic_id}. {image_url} to {local_path}")
        try:
            download_fn(image_url, local_path)
            result.downloaded += 1
        except DownloadError as e:
            result.failed_downloads += 1
            app_logger.warning(f"Unable to download {comic_id}. {image_url} to {local_path}: {e}")

    return result


def run(db_path=None, image_dir=None, debug=False) -> int:
    """
    Run one full sync and return the process exit code.

    0 when the loop completes (individual download failures included), 1 on
    any configuration, database or API failure.
    """
    try:
        load_config()
        set_debug_logging(debug or debug_logging_enabled())
        cfg = resolve_config(db_path=db_path, image_dir=image_dir)
    except (ConfigError, OSError, configparser.Error) as e:
        app_logger.error(f"Configuration failed: {e}")
        return 1

    try:
        store = ComicStore.open(cfg.db_path)
    except StoreError as e:
        app_logger.error(f"Unable to open comic store: {e}")
        return 1

    app_logger.info(f"DB: {cfg.db_path} Local Directory: {cfg.image_dir}")
    client = XkcdClient(base_url=cfg.api_base_url, timeout=cfg.request_timeout)

    try:
        result = sync_comics(store, client, cfg)
        total_cached = store.count_comics()
    except XkcdApiError as e:
        reason = 'xkcd is currently unreachable' if is_connection_error(e) else 'xkcd API error'
        app_logger.error(f"{reason}: {e}")
        return 1
    except StoreError as e:
        app_logger.error(f"Comic store error: {e}")
        return 1
    finally:
        client.close()
        store.close()

    app_logger.info(
        f"Sync complete: {result.checked} checked, {result.fetched} fetched, "
        f"{result.inserted} cached, {result.downloaded} downloaded, "
        f"{result.skipped_existing} already present, {result.failed_downloads} failed "
        f"({total_cached} comics in store)"
    )
    return 0


def main():
    parser = argparse.ArgumentParser(
        description='Download xkcd comic images',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument(
        '-db', '--db', dest='db',
        help='Where the local info is stored, like what has been pulled from the API '
             '(default: ~/.xkcd_downloader.db)'
    )
    parser.add_argument(
        '-imgdir', '--imgdir', dest='imgdir',
        help='Where the comic images are saved to (default: ~/Pictures/xkcd)'
    )
    parser.add_argument(
        '--debug', action='store_true',
        help='Enable debug logging'
    )

    args = parser.parse_args()

    app_logger.info(f"xkcd downloader started at {datetime.now().isoformat()}")
    sys.exit(run(db_path=args.db, image_dir=args.imgdir, debug=args.debug))


if __name__ == '__main__':
    main()
