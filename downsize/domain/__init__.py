"""
This package contains the core domain models of Smart Downsize.

Modules:
    exceptions.py: Custom exception types separating engine failures,
                   filesystem failures and invalid options.
    options.py: The `ConversionOptions` record (and its `WatermarkOptions`)
                accepted by every conversion entry point.
"""
