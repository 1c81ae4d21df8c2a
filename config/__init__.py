"""Configuration package: settings, OPCO registry and QA user agent."""
