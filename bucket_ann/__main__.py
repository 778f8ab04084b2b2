"""Demo: build a small index and print nearest neighbours.

Run with ``python -m bucket_ann``.
"""

import logging

from .index import BucketIndex

logger = logging.getLogger("bucket_ann.demo")

SAMPLE_VECTORS = [
    [1.0, 2.0, 3.0],
    [4.0, 5.0, 6.0],
    [7.0, 8.0, 9.0],
    [0.0, 0.0, 0.0],
]

SAMPLE_QUERIES = [
    [0.9, 2.0, 2.8],
    [5.0, 5.2, 6.3],
    [7.5, 8.5, 8.9],
]


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    index = BucketIndex(capacity=10)
    for vector in SAMPLE_VECTORS:
        index.insert(vector)
    logger.info("%r", index)

    for i, query in enumerate(SAMPLE_QUERIES, start=1):
        logger.info("Nearest neighbour for query %d %s: %s", i, query, index.query(query))


if __name__ == "__main__":
    main()
