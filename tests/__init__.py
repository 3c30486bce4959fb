# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the MediaID API:
# - test_exceptions.py: Error taxonomy and classification
# - test_rate_limiter.py: Fixed-window limiter and eviction sweep
# - test_cors.py: CORS gate and header decoration
# - test_pipeline.py: End-to-end middleware behaviour through the app
# - test_signup.py: Signup entry point with a mocked Supabase client
# - test_config.py: Settings, response envelopes and validation helpers
#
# Run tests with: pytest
# =============================================================================
