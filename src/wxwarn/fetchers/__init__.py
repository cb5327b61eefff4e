"""Fetchers for the NWS alerts shapefile archive and alert details."""
