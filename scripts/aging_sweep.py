"""CLI for checking stored content for aging and saving the updated aging records"""

import argparse
import sys

from loguru import logger

from contentlens.aging import AgingRuleEngine, AgingService, SampledLinkChecker
from contentlens.config import settings
from contentlens.content_store.local import LocalContentStore
from contentlens.domain.content import ContentType
from contentlens.library import ContentLibrary
from contentlens.search_backends import HybridSearchIndex


def main(
    store_file: str,
    limit: int,
    content_type: ContentType | None,
    force_recheck: bool,
    reindex: bool,
) -> None:
    store = LocalContentStore(filepath=store_file)
    search_index = HybridSearchIndex.create(
        store=store,
        url=settings.search_url,
        index=settings.search_index,
        timeout=settings.search_timeout,
        probe_timeout=settings.search_probe_timeout,
    )
    aging = AgingService(
        store=store,
        engine=AgingRuleEngine(
            link_checker=SampledLinkChecker(sample_rate=settings.broken_link_sample_rate),
            freshness_threshold=settings.freshness_threshold,
        ),
        max_workers=settings.batch_workers,
    )
    library = ContentLibrary(store=store, search_index=search_index, aging=aging)

    try:
        result = library.identify_outdated(
            limit=limit, content_type=content_type, force_recheck=force_recheck
        )
        outdated = sorted(cid for cid, a in result.results.items() if a.is_outdated)
        logger.info(f"{len(outdated)} of {result.processed} checked items are outdated")
        for content_id in outdated:
            logger.info(f"Outdated: {content_id}")
        for error in result.errors:
            logger.error(f"Failed to check {error.content_id}: {error.error}")

        if reindex:
            library.reindex_all()
    finally:
        search_index.close()

    store.save(store_file)


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--store-file",
        type=str,
        required=False,
        help="Local content store file",
        default=settings.content_store_path,
    )
    parser.add_argument(
        "--limit", type=int, required=False, help="Maximum items to check", default=100
    )
    parser.add_argument(
        "--content-type",
        type=ContentType,
        choices=list(ContentType),
        required=False,
        help="Only check content of this type",
        default=None,
    )
    parser.add_argument(
        "--force-recheck",
        action="store_true",
        help="Also re-check content that is already flagged as outdated",
    )
    parser.add_argument(
        "--reindex",
        action="store_true",
        help="Push all processed content to the search engine afterwards",
    )

    args = parser.parse_args()

    logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])
    main(
        store_file=args.store_file,
        limit=args.limit,
        content_type=args.content_type,
        force_recheck=args.force_recheck,
        reindex=args.reindex,
    )
