from .realtime_broadcaster import END_OF_STREAM, RealtimeBroadcaster, BroadcastSubscriber
