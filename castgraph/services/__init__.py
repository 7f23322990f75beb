"""Domain services: cast fetch, graph build, layout, recommendations, sessions."""
