"""HTTP framework adapters. Import the submodule for the framework in use."""
