#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Builds the RTT and location tables from the WonderProxy dataset.

For more details on the dataset, check
`here <https://wonderproxy.com/blog/a-day-in-the-life-of-the-internet/>`_.
"""

from .generate import main

if __name__ == "__main__":
    main()
