"""
tests/integration/
~~~~~~~~~~~~~~~~~~
Integration tests that call the real live-traffic providers.

These tests are SKIPPED by default. To run them:

    INTEGRATION_TESTS=1 pytest tests/integration/ -v

Rate Limit Considerations:
- OpenSky: anonymous credits are tiny - set OPENSKY_* credentials, avoid in CI
- adsb.fi: 1 req/sec on the open data feed
"""
