"""Output adapters — where each target tool expects an asset and in what form."""
