#!/usr/bin/env python3
"""Run all unit tests.

Usage: python run_all_tests.py
"""
import unittest
import sys

loader = unittest.TestLoader()

print("Loading unit test modules in ./tests directory...")
suite = unittest.TestSuite()

test_modules = [
    'tests.test_action_planner',
    'tests.test_back_annotation',
    'tests.test_device_recognizer',
    'tests.test_lvs_refiner',
    'tests.test_netlist_assembler',
    'tests.test_parameter_comparator',
    'tests.test_parasitic_extractor',
    'tests.test_placement',
    'tests.test_rx_graph',
    'tests.test_spice_writer',
    'tests.test_sync_integration',
    'tests.test_sync_mapper',
]

for module in test_modules:
    try:
        suite.addTests(loader.loadTestsFromName(module))
    except Exception as e:
        print(f"Warning: Could not load {module}: {e}")

print(f"\nRunning {suite.countTestCases()} tests...")
print("="*70)

runner = unittest.TextTestRunner(verbosity=1)
result = runner.run(suite)

print("\n" + "="*70)
print("TEST SUMMARY")
print("="*70)
print(f"Tests run: {result.testsRun}")
print(f"Successes: {result.testsRun - len(result.failures) - len(result.errors)}")
print(f"Failures: {len(result.failures)}")
print(f"Errors: {len(result.errors)}")

if result.failures:
    print("\nFAILED TESTS:")
    for test, _ in result.failures:
        print(f"  ❌ {test}")

if result.errors:
    print("\nERRORS:")
    for test, _ in result.errors:
        print(f"  ❌ {test}")

print("="*70)
sys.exit(0 if result.wasSuccessful() else 1)
