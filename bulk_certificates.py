#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Fill a certificate template with one PDF or image per CSV row.
"""

# Standard Library
import sys

# local repo modules
import bulk_certificate.cli


if __name__ == "__main__":
	sys.exit(bulk_certificate.cli.main())
