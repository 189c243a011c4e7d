"""Write-through, multi-index cache over cancer-study patients."""
