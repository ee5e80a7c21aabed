"""Foundation layer: errors, configuration, tool base classes and registry."""
