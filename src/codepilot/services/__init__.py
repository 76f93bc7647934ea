# Services package
# Protocol client, tool catalog, scoring, argument synthesis, routing and execution
