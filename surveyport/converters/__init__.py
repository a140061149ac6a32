# Format adapters, column mapping, consolidation and export rendering
