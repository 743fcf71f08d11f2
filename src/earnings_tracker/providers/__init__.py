"""Data providers: SEC EDGAR, headless browser and finance-site adapters."""
