"""fmtwalk: resolve formatter inputs into files, honoring layered ignore rules."""
