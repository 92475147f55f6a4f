#!/usr/bin/env python3
"""
DeBank wallet proxy
Entry point: python -m debank_proxy.main serve
"""
from .cli import main

if __name__ == "__main__":
    main()
