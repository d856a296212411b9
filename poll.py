#!/usr/bin/env python3
import argparse
import logging
import os
import sys
import time
from typing import Dict, List, Optional, Tuple

from pollerlib.config import DEFAULT_BASE_URI, DEFAULT_CACHE_SIZE, DEFAULT_USER_AGENT, FetcherConfig
from pollerlib.errors import UnexpectedStatusError
from pollerlib.kinds import FEATURES, SEGMENTS, VersionedDataKind
from pollerlib.metrics import StatsLogger
from pollerlib.prometheus_exporter import PrometheusExporter
from pollerlib.requestor import Requestor
from pollerlib.storage import JsonlWriter


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Poll flag and segment data with ETag-validated caching.")
    parser.add_argument("--sdk-key", default=os.environ.get("LD_SDK_KEY"), help="SDK key (defaults to $LD_SDK_KEY).")
    parser.add_argument("--base-uri", default=DEFAULT_BASE_URI, help="Base URI of the polling service.")
    parser.add_argument("--timeout", type=float, default=5.0, help="HTTP read timeout in seconds.")
    parser.add_argument("--connect-timeout", type=float, default=None, help="HTTP connect timeout in seconds (defaults to --timeout).")
    parser.add_argument("--cache-size", type=int, default=DEFAULT_CACHE_SIZE, help="Cached responses to keep (0 disables).")
    parser.add_argument("--proxy", dest="proxy_url", default=None, help="HTTP(S) proxy URL.")
    parser.add_argument("--ca-certs", default=None, help="CA bundle used to verify the server.")
    parser.add_argument("--insecure", action="store_true", help="Skip TLS certificate verification (not recommended).")
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header to send.")
    parser.add_argument("--interval", type=float, default=1.0, help="Seconds between polls.")
    parser.add_argument("--once", action="store_true", help="Poll a single time and exit.")
    parser.add_argument("--flag", dest="flags", nargs="+", default=[], help="Fetch these flag keys instead of all data.")
    parser.add_argument("--segment", dest="segments", nargs="+", default=[], help="Fetch these segment keys instead of all data.")
    parser.add_argument("--out", dest="output_path", default=None, help="Append one JSONL record per poll outcome.")
    parser.add_argument("--metrics-interval", type=float, default=10.0, help="Seconds between stats logs (0 to disable).")
    parser.add_argument("--prometheus-port", type=int, default=0, help="Port for Prometheus metrics endpoint (0 to disable).")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase logging verbosity.")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> FetcherConfig:
    tls_params: Dict[str, str] = {}
    if args.ca_certs:
        tls_params["ca_certs"] = args.ca_certs
    if args.insecure:
        tls_params["cert_reqs"] = "CERT_NONE"
    return FetcherConfig(
        sdk_key=args.sdk_key,
        base_uri=args.base_uri,
        timeout=max(0.1, args.timeout),
        connect_timeout=max(0.1, args.connect_timeout) if args.connect_timeout is not None else None,
        tls_params=tls_params,
        proxy_url=args.proxy_url,
        cache_size=args.cache_size,
        user_agent=args.user_agent,
    )


def poll_once(requestor: Requestor, targets: List[Tuple[VersionedDataKind, str]]) -> List[BaseException]:
    """Run one round of fetches, one at a time; return the errors seen."""
    failures: List[BaseException] = []

    def done(err, body) -> None:
        if err is not None:
            failures.append(err)
        else:
            logging.info("Received %d bytes", len(body))

    if not targets:
        requestor.request_all_data(done).result()
    for kind, key in targets:
        requestor.request_object(kind, key, done).result()
    return failures


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    log_level = logging.WARNING
    if args.verbose == 1:
        log_level = logging.INFO
    elif args.verbose >= 2:
        log_level = logging.DEBUG
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(threadName)s %(message)s",
    )
    if not args.sdk_key:
        logging.error("No SDK key given; pass --sdk-key or set LD_SDK_KEY")
        return 2

    targets = [(FEATURES, k) for k in args.flags] + [(SEGMENTS, k) for k in args.segments]
    writer = JsonlWriter(args.output_path, append=True) if args.output_path else None
    requestor = Requestor(build_config(args), outcome_listener=writer.write_outcome if writer else None)

    exporter: Optional[PrometheusExporter] = None
    if args.prometheus_port > 0:
        exporter = PrometheusExporter(requestor.metrics, port=args.prometheus_port)
        exporter.start()
    stats_thread: Optional[StatsLogger] = None
    if args.metrics_interval > 0 and not args.once:
        stats_thread = StatsLogger(requestor.metrics, args.metrics_interval, logging.info)
        stats_thread.start()

    failures: List[BaseException] = []
    try:
        while True:
            failures = poll_once(requestor, targets)
            fatal = [e for e in failures if isinstance(e, UnexpectedStatusError) and not e.recoverable]
            if fatal:
                logging.error("Received status %d, which a retry will not fix; stopping", fatal[0].status)
                break
            if args.once:
                break
            time.sleep(max(0.1, args.interval))
    except KeyboardInterrupt:
        logging.info("Interrupted")
    finally:
        if stats_thread:
            stats_thread.stop()
        if exporter:
            exporter.stop()
        requestor.close()
        if writer:
            writer.close()
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
