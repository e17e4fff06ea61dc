"""Loading of config.yaml and entity record files into the registry."""
