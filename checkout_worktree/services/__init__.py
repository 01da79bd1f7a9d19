"""Services used by the checkout workflow."""
