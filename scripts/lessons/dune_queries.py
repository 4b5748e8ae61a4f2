#!/usr/bin/env python3
"""
Run saved Dune queries and export their rows. Requires DUNE_API_KEY.
"""

import argparse
import logging

from history_sleuth import DuneClient, QueryParameter, data_path, save_records
from history_sleuth.indexing import fetch_many, summarize_column
from history_sleuth.utils import setup_logging

logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("query_id", type=int, help="Saved query id (from the dune.com URL)")
    parser.add_argument("--latest", action="store_true", help="Use cached results, do not execute")
    parser.add_argument("--token", help="token_address parameter")
    parser.add_argument("--limit", type=int, help="limit parameter")
    parser.add_argument("--start-date", help="start_date parameter, YYYY-MM-DD")
    parser.add_argument("--sum-column", help="Print total/average of a numeric column")
    parser.add_argument("--also", type=int, nargs="*", default=[], help="More query ids to fetch")
    parser.add_argument("--output", help="Export rows (.parquet or .json), default under PARQUET_DATA_DIR")
    args = parser.parse_args()

    setup_logging()
    parameters = []
    if args.token:
        parameters.append(QueryParameter.text("token_address", args.token))
    if args.limit is not None:
        parameters.append(QueryParameter.number("limit", args.limit))
    if args.start_date:
        parameters.append(QueryParameter.date("start_date", f"{args.start_date} 00:00:00"))

    with DuneClient() as client:
        if args.latest:
            result = client.get_latest_result(args.query_id)
        else:
            result = client.run_query(args.query_id, parameters)
        logger.info(f"State: {result.state}, rows: {len(result.rows)}")

        if args.sum_column:
            summary = summarize_column(result.rows, args.sum_column)
            logger.info(
                f"{args.sum_column}: total {summary['total']:,}, average {summary['average']:,.2f}"
            )

        if args.also:
            others = fetch_many(client, {str(q): q for q in args.also})
            for name, rows in others.items():
                logger.info(f"Query {name}: {len(rows)} rows")

    save_records(result.rows, args.output or data_path("dune", f"{args.query_id}.parquet"))


if __name__ == "__main__":
    main()
