"""AspectLoom — AspectJ inter-type declaration source generation."""
