"""countdown - personal countdown and milestone tracker."""
