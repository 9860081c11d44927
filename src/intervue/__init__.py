"""InterVue: mock interview practice with a gamification core."""
