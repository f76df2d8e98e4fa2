#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""Ingestion of the WonderProxy dataset and construction of the RTT tables."""
