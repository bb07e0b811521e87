"""Core models and value providers for fixtureforge."""
