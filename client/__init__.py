"""Client-side components: auth session, chart gallery and insight feed."""
