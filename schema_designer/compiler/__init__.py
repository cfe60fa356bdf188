"""Schema module compiler: assembler, import merging and resolution, function table."""
