"""CLI entry points: static export and listing inspection."""

import argparse
import json
import logging
import sys
from pathlib import Path

from app.build import render_site, write_site
from app.clients.prismic import PrismicClient
from app.errors import ContentServiceError
from app.rendering import PageRenderer
from app.services.pagination import PostListing
from app.services.posts_service import PostsService
from app.settings import Settings, settings

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build(output_dir: Path, settings_obj: Settings = settings, client=None) -> int:
    """Write the statically generated site. Returns the number of pages written."""
    client = client or PrismicClient.from_settings(settings_obj)
    with client:
        pages = render_site(
            PostsService(client, settings_obj), PageRenderer(settings_obj), export=True
        )
    return len(write_site(pages, output_dir))


def list_posts(settings_obj: Settings = settings, client=None, all_pages: bool = False):
    client = client or PrismicClient.from_settings(settings_obj)
    with client:
        service = PostsService(client, settings_obj)
        listing = PostListing.from_pagination(
            service.get_home_pagination(),
            service.fetch_next_page,
            dedupe=settings_obj.DEDUPE_PAGINATED_POSTS,
        )
        if all_pages:
            listing.load_all()
        return listing


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="spacetraveling blog tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser("build", help="Statically generate the site")
    build_parser.add_argument(
        "--output",
        default=settings.BUILD_OUTPUT_DIR,
        help=f"Output directory (default: {settings.BUILD_OUTPUT_DIR})",
    )

    posts_parser = subparsers.add_parser("posts", help="Print the post listing as JSON")
    posts_parser.add_argument(
        "--all", action="store_true", help="Follow cursors until the last page"
    )

    args = parser.parse_args(argv)
    setup_logging(settings.LOG_LEVEL)

    try:
        if args.command == "build":
            count = build(Path(args.output))
            logger.info(f"Build finished: {count} pages")
        else:
            listing = list_posts(all_pages=args.all)
            payload = {
                "next_page": listing.next_page,
                "results": [post.model_dump() for post in listing.posts],
            }
            json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
            sys.stdout.write("\n")
    except ContentServiceError as e:
        logger.error(f"{args.command} failed: {e}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
