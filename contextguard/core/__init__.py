"""Core building blocks shared by every stage of the analysis pipeline."""
