"""Local CA trust store and signing-key management."""
