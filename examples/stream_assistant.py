import dotenv

from brain_stream import AssistantClient, DeltaEvent, FinalEvent, ToolResultEvent, ToolStartEvent

dotenv.load_dotenv()


def on_event(event):
    if isinstance(event, DeltaEvent):
        print(event.content, end="", flush=True)
    elif isinstance(event, ToolStartEvent):
        print(f"\n[tool] {event.tool} ...")
    elif isinstance(event, ToolResultEvent):
        print(f"[tool] {event.tool} -> {'error' if event.error else 'ok'}")
    elif isinstance(event, FinalEvent):
        print("\n\nNext actions:")
        for action in event.payload.next_actions:
            print(f"  - {action}")


with AssistantClient() as client:
    client.run([{"role": "user", "content": "What SOPs do we have for onboarding?"}], on_event)
