#!/usr/bin/env vpython3
# *-* coding: utf-8 *-*
"""Upgrade an ASiC-E container from XAdES-BES to XAdES-T."""
import argparse
import logging
import sys

from asicet import extender
from asicet.config import TSAConfig
from asicet.errors import AsiceError, StructureInvalid
from asicet.xades.t import POLICIES


def main():
    p = argparse.ArgumentParser(description=__doc__)
    p.add_argument("input", help="XAdES-BES .asice container")
    p.add_argument("output", help="where to write the XAdES-T container")
    p.add_argument("--url", help="TSA endpoint (default from ASICET_TSA_URL)")
    p.add_argument("--timeout", type=float, help="TSA timeout in seconds")
    p.add_argument("--username")
    p.add_argument("--password")
    p.add_argument("--tsr", help="use a DER TimeStampResp file instead of calling the TSA")
    p.add_argument("--on-existing", choices=POLICIES, default="append")
    p.add_argument("--c14n", action="store_true", help="hash the SignatureValue in C14N 1.0 form")
    p.add_argument("--debug", action="store_true")
    args = p.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)

    tsa = TSAConfig.from_env()
    if args.url:
        tsa.url = args.url
    if args.timeout:
        tsa.timeout = args.timeout
    if args.username and args.password:
        tsa.credentials = {"username": args.username, "password": args.password}

    tsresponse = None
    if args.tsr:
        with open(args.tsr, "rb") as fh:
            tsresponse = fh.read()
    with open(args.input, "rb") as fh:
        data = fh.read()

    try:
        data = extender.extend(
            data,
            tsa,
            tsresponse=tsresponse,
            on_existing=args.on_existing,
            canonicalization="c14n" if args.c14n else "normalized",
        )
    except StructureInvalid as ex:
        for error in ex.errors:
            print("error:", error, file=sys.stderr)
        for warning in ex.warnings:
            print("warning:", warning, file=sys.stderr)
        return 1
    except AsiceError as ex:
        print("error:", ex, file=sys.stderr)
        return 1

    with open(args.output, "wb") as fh:
        fh.write(data)
    print(args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
