#!/usr/bin/env python
"""
Build pipeline - compiles promotions and runs the test suite.

Usage:
    python scripts/build_promotions.py
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from order_calculator.config.settings import get_settings
from order_calculator.promotions.compile_promotions import compile_promotions


def main():
    print("=" * 60)
    print("ORDER CALCULATOR BUILD PIPELINE")
    print("=" * 60)
    print()

    settings = get_settings()

    print("[1/2] Compiling promotions...")
    success, promotions, errors = compile_promotions(settings.promotions_csv, settings.compiled_promotions)

    if not success:
        print("\n❌ BUILD FAILED")
        for error in errors:
            print(f"  ERROR: {error}")
        sys.exit(1)

    print()
    print("[2/2] Running tests...")

    import subprocess
    test_result = subprocess.run(
        [sys.executable, '-m', 'pytest', 'tests', '-v', '--tb=short'],
        cwd=Path(__file__).parent.parent
    )

    if test_result.returncode != 0:
        print("\n❌ TESTS FAILED")
        sys.exit(1)

    print()
    print("=" * 60)
    print("✅ BUILD COMPLETE")
    print("=" * 60)
    print()
    print("Promotions:")
    for promotion in promotions:
        state = "active" if promotion.enabled else "inactive"
        print(f"  {promotion.id}: {promotion.name} ({state}, priority {promotion.priority})")


if __name__ == "__main__":
    main()
