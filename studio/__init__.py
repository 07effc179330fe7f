"""NexusForge Studio: HTTP surface over the kernel workspace."""
