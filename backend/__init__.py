"""HTTP surface for one PLIVE TV viewer session."""
