"""secrets-injector: mutating admission webhook injecting a shared secrets volume."""
