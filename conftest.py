"""Configure pytest for the waiver context project."""
import os
import sys
from pathlib import Path

# =============================================================================
# Test Environment Configuration
# =============================================================================
# Set environment for tests BEFORE any imports so the service never reaches
# the network and never picks up a developer's defense source.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ["WAIVER_CONTEXT_LIVE"] = "false"
os.environ.pop("DEFENSE_RANKINGS_SOURCE", None)

# Add project root for app/context/scoring imports
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))
