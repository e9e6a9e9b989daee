"""Stackwire backend definition engine.

Stackwire resolves a declarative mapping of construct factories into a wired
graph of infrastructure resources. Every construct is built exactly once,
resources are grouped into nested deployment units by resource group, and
naming, attribution, secret resolution and output collection are applied the
same way for every resource.

Key Features:
    - Identity-keyed memoization of construct generators
    - Capability tokens for looking up other factories without imports
    - Lazily created nested deployment units per resource group
    - Deep-merged, versioned client configuration outputs

Basic Usage:
    >>> from stackwire.backend_factory import define_backend
    >>>
    >>> backend = define_backend({"auth": auth_factory, "data": data_factory})
    >>> user_pool = backend["auth"]
    >>> custom = backend.create_stack("analytics")
    >>> backend.add_output({"custom": {"analytics_bucket": "..."}})

The framework consists of several core modules:
    - backend_factory: Two-pass resolution of construct factories
    - singleton_construct_container: Memoized construct creation and token registry
    - nested_stack_resolver: Resource group to deployment unit mapping
    - custom_outputs: Accumulation of user-supplied outputs
    - deployment: The in-memory deployment unit tree
    - domain: Core domain models and factory protocols
    - errors: Framework-specific exceptions
"""

__version__ = "0.1.0"
