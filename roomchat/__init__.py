"""
roomchat
~~~~~~~~

匿名小群聊服务 —— 新连接自动分配到有空位的房间，并在房间内转发消息。
"""
