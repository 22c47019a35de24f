"""Follow domain: models, storage, service and use cases."""