"""MCP Prompts: conversation starters for the planner's user journeys."""

from __future__ import annotations

from fastmcp import FastMCP


def register_fitness_prompts(mcp: FastMCP) -> None:
    """Register fitness planner MCP prompts."""

    @mcp.prompt()
    def fitness_plan_prompt(goal: str = "general fitness") -> str:
        """Prompt template for building a complete plan toward a goal."""
        return f"""I want a practical fitness plan for {goal}. Please:

1. Show my current BMI, daily calorie target and macro split
2. Give me a short summary with my top 3 tips
3. Build today's diet plan from foods I can buy locally
4. Walk me through today's workout routine

If I haven't saved a profile yet, ask me for the details you need first."""

    @mcp.prompt()
    def profile_update_prompt(change: str = "my weight") -> str:
        """Prompt template for updating the profile after a change."""
        return f"""I'd like to update {change} in my profile.

1. Show me my current profile
2. Ask me for the new value and save it
3. Tell me how my calorie and macro targets changed
4. Regenerate my diet plan if the targets changed"""
